"""Academic records domain core.

Student aggregate, identity documents, faculties and the email-domain and
phone-number registries, with the business rules that keep them valid.
Independent of any web framework or database.
"""
