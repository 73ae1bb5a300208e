"""Application services: resolution, discovery, routing, overrides, inbox, HOD projection."""
