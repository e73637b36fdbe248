"""Core of the approval engine: policy resolution and approval state."""
