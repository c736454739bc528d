"""Static lookup tables for the 13x13 hand grid."""
