"""Rules shared by services and repositories: token expiry and group access."""
