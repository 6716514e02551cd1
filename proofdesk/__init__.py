"""
Proofdesk - Ad Proof Review and Approval

Build mock ad creatives for Facebook, Instagram, LinkedIn, YouTube and
Google Performance Max, share them with clients through a link, and collect
version-pinned approve/revise feedback.
"""

__version__ = "0.1.0"
__author__ = "Proofdesk Team"
