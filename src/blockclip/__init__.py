"""blockclip - Copy and paste block subtrees between visual-program documents."""

__version__ = "0.1.0"
