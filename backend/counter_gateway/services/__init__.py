"""Services — the chain gateway façade used by the API layer."""
