"""vstbundle command-line interface."""
