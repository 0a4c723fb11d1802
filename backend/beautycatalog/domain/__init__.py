"""Pure domain rules shared by services, routes and clients."""
