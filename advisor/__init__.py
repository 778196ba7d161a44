"""
Career advisor recommendation package root.

- rule_based: fixed-weight rule scoring for college / career / course candidates.
- service: profile access, behavior tracking, insights, recommendation snapshots.
- Data is loaded from MongoDB (userprofiles, colleges, careers, courses).
"""
