"""Contest core: normalization, progression, leaderboard projection, change feed"""
