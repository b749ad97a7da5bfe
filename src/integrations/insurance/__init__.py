"""Partner activity insurance: request building, signing and the HTTP client."""
