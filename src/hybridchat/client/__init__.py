"""HTTP and command-line clients for hybridchat."""
