"""QR Attendance package.

Feature modules (staff, attendance, photos) each carry a model, a repository
interface with its MySQL implementation, a service layer and a thin Flask
controller.
"""
