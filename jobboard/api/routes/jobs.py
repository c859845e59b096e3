"""Job listing, search, recommendation and owner routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from jobboard.auth import Actor
from jobboard.domain.models import Job, JobType
from jobboard.matching import SearchFilters
from jobboard.services.container import ServiceContainer

from ..dependencies import current_actor, get_services, require_recruiter
from ..schemas import (
    CandidateMatch,
    JobCreateRequest,
    JobSummary,
    MatchedCandidatesResponse,
    RecommendedJob,
    SearchResult,
    StatusUpdateRequest,
)

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("", response_model=List[Job])
async def list_jobs(services: ServiceContainer = Depends(get_services)):
    return await services.jobs.list_jobs()


@router.post("", response_model=Job, status_code=201)
async def create_job(
    body: JobCreateRequest,
    actor: Actor = Depends(require_recruiter),
    services: ServiceContainer = Depends(get_services),
):
    return await services.jobs.create_job(actor, **body.model_dump())


@router.get("/recommend", response_model=List[RecommendedJob])
async def recommend_jobs(
    actor: Actor = Depends(current_actor),
    services: ServiceContainer = Depends(get_services),
):
    scored = await services.jobs.recommend(actor)
    return [RecommendedJob(**entry.job.model_dump(), score=entry.score) for entry in scored]


@router.get("/search", response_model=List[SearchResult])
async def search_jobs(
    keyword: Optional[str] = None,
    location: Optional[str] = None,
    skills: Optional[str] = None,
    min_exp: Optional[int] = Query(None, alias="minExp", ge=0),
    max_exp: Optional[int] = Query(None, alias="maxExp", ge=0),
    min_salary: Optional[int] = Query(None, alias="minSalary", ge=0),
    max_salary: Optional[int] = Query(None, alias="maxSalary", ge=0),
    job_type: Optional[JobType] = Query(None, alias="jobType"),
    services: ServiceContainer = Depends(get_services),
):
    filters = SearchFilters(
        keyword=keyword,
        location=location,
        skills=skills,
        min_exp=min_exp,
        max_exp=max_exp,
        min_salary=min_salary,
        max_salary=max_salary,
        job_type=job_type,
    )
    hits = await services.jobs.search(filters)
    return [
        SearchResult(**hit.job.model_dump(), match_score=hit.score, match_percentage=hit.match_percentage)
        for hit in hits
    ]


@router.get("/mine", response_model=List[Job])
async def list_my_jobs(
    actor: Actor = Depends(require_recruiter),
    services: ServiceContainer = Depends(get_services),
):
    return await services.jobs.list_own_jobs(actor)


@router.get("/{job_id}", response_model=Job)
async def get_job(job_id: int, services: ServiceContainer = Depends(get_services)):
    return await services.jobs.get_job(job_id)


@router.patch("/{job_id}/status", response_model=Job)
async def update_job_status(
    job_id: int,
    body: StatusUpdateRequest,
    actor: Actor = Depends(require_recruiter),
    services: ServiceContainer = Depends(get_services),
):
    return await services.jobs.update_status(actor, job_id, body.status)


@router.get("/{job_id}/matched-candidates", response_model=MatchedCandidatesResponse)
async def matched_candidates(
    job_id: int,
    actor: Actor = Depends(require_recruiter),
    services: ServiceContainer = Depends(get_services),
):
    job, matches = await services.jobs.matched_candidates(actor, job_id)
    candidates = [
        CandidateMatch(
            profile_id=match.profile.id,
            user_id=match.user.id,
            name=match.user.name,
            email=match.user.email,
            headline=match.profile.headline,
            experience=match.profile.experience,
            skills=match.profile.skills,
            resume_url=match.profile.resume_url,
            match_score=match.score,
        )
        for match in matches
    ]
    return MatchedCandidatesResponse(
        job=JobSummary(
            id=job.id,
            title=job.title,
            company=job.company,
            skills=job.skills,
            location=job.location,
        ),
        candidates=candidates,
        total_matches=len(candidates),
    )
