"""Optional Qt integration; importing this package requires PySide6."""
