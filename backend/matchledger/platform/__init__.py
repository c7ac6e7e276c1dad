"""Platform concerns shared by all routes: errors, identity, health."""
