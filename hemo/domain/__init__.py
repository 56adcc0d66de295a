"""Domain rules (validation) independent of storage and transport."""
