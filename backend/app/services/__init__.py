# Services package init
"""
Customer Details Backend — Services Layer
===========================================

Service Inventory:
    - PasswordService: bcrypt hashing and verification
    - LoginService: credential check and JWT issue/verify
    - EditUserService: partial customer updates
    - DistanceService: haversine distance to a customer
    - SearchUserService: free-text customer search
    - CustomerListService: full listing and zip code grouping
    - SeedService: roles, bootstrap admin and customer import

Each service is a stateless module-level singleton that receives the
request's AsyncSession as an argument.
"""
