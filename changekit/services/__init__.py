"""Services: changeset storage, classification, release notes, contributors."""
