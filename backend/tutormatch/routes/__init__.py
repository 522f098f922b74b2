# Routes package init
"""
TutorMatch Backend — API Routes Package
=========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - auth.py:      /api/auth/{student,tutor}/{signup,login}, /api/auth/admin/login,
                    /api/auth/logout
    - tutors.py:    /api/tutors, /api/tutors/recommended, /api/tutors/me,
                    /api/tutors/{id}
    - students.py:  /api/students/me
    - bookings.py:  /api/bookings, /api/bookings/{student,tutor}, /api/bookings/{id}
    - reviews.py:   /api/reviews, /api/reviews/tutor/{id}, /api/reviews/{id}
    - admin.py:     /api/admin/tutors, /api/admin/tutors/{id}/verify
    - payments.py:  /api/payments/intents, /api/payments/webhook
    - health.py:    /health

Routes are thin: they pull data out of the request, resolve the principal
through dependencies.py, call one service method and return its result.
Business rules live in services.
"""
