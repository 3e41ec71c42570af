"""General helpers: text widths, character buffers, events, exit hooks and shell execution."""