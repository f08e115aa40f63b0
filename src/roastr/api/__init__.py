"""HTTP surface of the Roastr front-end."""
