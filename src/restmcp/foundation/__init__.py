"""Foundation layer: configuration and error handling."""
