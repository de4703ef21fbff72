"""Resource sharing: who a resource is shared with, and under which role."""
