"""Java code generation from block graphs."""
