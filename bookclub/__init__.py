"""Book club microsite generator.

Converts a fixed set of Markdown documents plus numbered meeting notes into
HTML fragments, and assembles them into a single tabbed index page. A
development server rebuilds the site on change and reloads the browser.

The main entry point is the CLI module, which provides commands for
scaffolding new projects, building the site, and running the development
server.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
