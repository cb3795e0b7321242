"""Application services for liftlog."""
