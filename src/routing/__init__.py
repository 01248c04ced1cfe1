"""Gallery URL routing and procedure slug resolution."""
