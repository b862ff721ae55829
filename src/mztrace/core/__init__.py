"""mztrace core models, interfaces and exceptions."""
