"""HTTP status surface for the keysync daemon."""
