"""Internal account panel: session authentication, role-based access and account lifecycle."""
