from .profile_record import DirectoryPage, OrgChart, ProfileFilter, ProfileRecord
from .bookmark import Bookmark, BookmarkFilter, BookmarkListing, Collection
from .colleague import ColleagueCriteria, ColleagueMatch, ColleagueSearchResult

__all__ = [
    "ProfileRecord",
    "ProfileFilter",
    "DirectoryPage",
    "OrgChart",
    "Bookmark",
    "BookmarkFilter",
    "BookmarkListing",
    "Collection",
    "ColleagueCriteria",
    "ColleagueMatch",
    "ColleagueSearchResult",
]
