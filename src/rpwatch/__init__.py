"""Watch CPU and memory usage of named processes across remote hosts."""
