"""Application – command dispatch, event-sourced persistence and host wiring."""
