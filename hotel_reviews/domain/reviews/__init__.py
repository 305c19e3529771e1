"""Reviews domain - guest submissions, tokens and dashboard queries"""
