"""Small helpers shared by recipebox modules."""
