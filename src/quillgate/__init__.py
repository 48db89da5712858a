"""QuillGate - authorization and governance core for the blog CMS."""

__version__ = "0.1.0"
