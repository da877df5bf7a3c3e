"""Microsoft Graph collaborators: authenticated client, directory lookups and models."""
