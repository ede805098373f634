from typing import NewType

UserId = NewType("UserId", int)
CategoryId = NewType("CategoryId", int)
TournamentId = NewType("TournamentId", int)
TournamentResultId = NewType("TournamentResultId", int)
RankingId = NewType("RankingId", int)
EmailCampaignId = NewType("EmailCampaignId", int)
