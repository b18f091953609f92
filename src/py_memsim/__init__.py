"""py-memsim — a paged virtual memory simulator."""
