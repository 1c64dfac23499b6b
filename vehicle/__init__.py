"""Vehicle-side consumer of the fuzzy engine: rule base and lane-change state machine."""
