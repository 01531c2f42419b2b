"""Well and permit records scrapers for state oil & gas portals."""
