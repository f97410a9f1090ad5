"""Click-through crosshair overlay: render engine, window and target lookup."""
