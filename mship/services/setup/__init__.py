"""First-run setup of the installed application: wizard steps and uninstall."""
