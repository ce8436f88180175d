"""Pattern matching, rule definitions and the single-pass matcher engine."""
