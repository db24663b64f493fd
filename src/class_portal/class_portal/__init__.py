"""Class Portal package.

Feature modules (identities, profiles, classes, posts, attendance) sit on top
of a single policy layer that decides, per row and per caller, what each
read or write may touch. Flask controllers stay thin.
"""
