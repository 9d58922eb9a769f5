"""Small shared helpers for respack."""
