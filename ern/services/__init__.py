"""Service layer - cauldron state, validation and container publication."""
