"""Interactive terminal session: key decoding, rendering, state machine."""
