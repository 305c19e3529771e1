"""Email batches domain - review request batches and their outcomes"""
