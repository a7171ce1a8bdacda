"""Individual ``buildorbit`` subcommands."""
