"""Domain layer (business logic and domain models).

Domain modules should not depend on UI or on the data store. Store access is
done by the services layer, which hands decoded records to these functions.
"""
