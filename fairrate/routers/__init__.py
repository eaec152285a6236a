"""HTTP routers, mounted under ``/api`` by ``fairrate.main``."""
