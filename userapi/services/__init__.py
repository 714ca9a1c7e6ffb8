"""Services Layer — business rules between the routes and the repository."""
