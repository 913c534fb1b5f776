"""Secret resolution engine and Vault credential lifecycle."""
