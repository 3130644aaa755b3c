"""Network access used by the distribution installer."""
