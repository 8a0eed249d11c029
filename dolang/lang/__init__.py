"""Language runtime around the core: natives, errors, sessions and the shell."""
