"""Core upload, store and event components."""
