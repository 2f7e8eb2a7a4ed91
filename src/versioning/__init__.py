"""Version models, specifier parsing and npm range evaluation."""
