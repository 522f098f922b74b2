# Services package init
"""
TutorMatch Backend — Services Layer
=====================================

What:  Business rules sitting between routes (HTTP) and the database.
How:   Each service is a stateless singleton; methods take the request's
       AsyncSession and flush, the session dependency commits.

Service Inventory:
    - availability:      pure weekly-availability predicates and validation
    - booking_lifecycle: booking status state machine and role rules
    - rating:            RatingAggregator, tutor rating recompute
    - BookingService:    conflict check, create, status change, delete
    - ReviewService:     create/list/delete reviews (+ rating recompute)
    - AuthService:       signup, login, admin bootstrap
    - TutorService:      search, recommendations, tutor profile
    - StudentService:    student profile
    - AdminService:      tutor listing and verification
    - PaymentService:    payment-intent and webhook stubs
"""
