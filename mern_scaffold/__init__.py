"""mern-scaffold: scaffold MERN stack projects from templates."""

__version__ = "1.0.0"
