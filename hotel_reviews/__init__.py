"""Hotel review requests API"""
