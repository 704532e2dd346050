"""Runtime support imported by generated wrapper modules."""
