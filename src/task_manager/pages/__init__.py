"""Screen controllers (login, tasks) and navigation between them."""
