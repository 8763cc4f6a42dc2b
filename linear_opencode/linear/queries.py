"""GraphQL documents sent to the Linear API.

Every document is a named operation; the operation name doubles as the
identifier in logs.
"""

USER_FIELDS = """
  id
  name
  displayName
  email
"""

ISSUE_FIELDS = f"""
  id
  identifier
  title
  description
  priority
  url
  createdAt
  updatedAt
  creator {{ id }}
  state {{ id name type color }}
  assignee {{ {USER_FIELDS} }}
  team {{ id key name }}
  parent {{ id }}
  project {{ id }}
  labels {{ nodes {{ id name }} }}
"""

COMMENT_FIELDS = f"""
  id
  body
  url
  createdAt
  updatedAt
  user {{ {USER_FIELDS} }}
  issue {{ id identifier title url }}
"""

PROJECT_FIELDS = """
  id
  name
  description
  content
  color
  icon
  priority
  startDate
  targetDate
  url
  lead { id name }
  teams { nodes { id } }
"""

MILESTONE_FIELDS = """
  id
  name
  description
  targetDate
  sortOrder
  project { id }
"""

RELATION_FIELDS = """
  id
  type
  createdAt
  issue { id identifier title creator { id } }
  relatedIssue { id identifier title }
"""

# --------------------------------------------------------------------------
# Identity and team data
# --------------------------------------------------------------------------

VIEWER = f"query Viewer {{ viewer {{ {USER_FIELDS} }} }}"

USER = f"query User($id: String!) {{ user(id: $id) {{ {USER_FIELDS} }} }}"

TEAMS = "query Teams($first: Int!) { teams(first: $first) { nodes { id key name } } }"

TEAM = "query Team($id: String!) { team(id: $id) { id key name } }"

TEAM_STATES = """
query TeamStates($id: String!) {
  team(id: $id) { states { nodes { id name type color description } } }
}
"""

TEAM_LABELS = """
query TeamLabels($id: String!) {
  team(id: $id) { labels { nodes { id name color description } } }
}
"""

WORKFLOW_STATE = """
query WorkflowState($id: String!) {
  workflowState(id: $id) { id name type color description }
}
"""

ISSUE_LABEL = """
query IssueLabel($id: String!) {
  issueLabel(id: $id) { id name color description }
}
"""

# --------------------------------------------------------------------------
# Issues
# --------------------------------------------------------------------------

ISSUE = f"query Issue($id: String!) {{ issue(id: $id) {{ {ISSUE_FIELDS} }} }}"

ISSUES = f"query Issues($first: Int!) {{ issues(first: $first) {{ nodes {{ {ISSUE_FIELDS} }} }} }}"

ISSUE_CHILDREN = f"""
query IssueChildren($id: String!, $first: Int!) {{
  issue(id: $id) {{ children(first: $first) {{ nodes {{ {ISSUE_FIELDS} }} }} }}
}}
"""

ISSUE_CREATE = f"""
mutation IssueCreate($input: IssueCreateInput!) {{
  issueCreate(input: $input) {{ success issue {{ {ISSUE_FIELDS} }} }}
}}
"""

ISSUE_UPDATE = f"""
mutation IssueUpdate($id: String!, $input: IssueUpdateInput!) {{
  issueUpdate(id: $id, input: $input) {{ success issue {{ {ISSUE_FIELDS} }} }}
}}
"""

ISSUE_DELETE = """
mutation IssueDelete($id: String!) { issueDelete(id: $id) { success } }
"""

# --------------------------------------------------------------------------
# Comments
# --------------------------------------------------------------------------

COMMENT = f"query Comment($id: String!) {{ comment(id: $id) {{ {COMMENT_FIELDS} }} }}"

COMMENTS = f"""
query Comments($first: Int!, $filter: CommentFilter) {{
  comments(first: $first, filter: $filter) {{ nodes {{ {COMMENT_FIELDS} }} }}
}}
"""

COMMENT_CREATE = f"""
mutation CommentCreate($input: CommentCreateInput!) {{
  commentCreate(input: $input) {{ success comment {{ {COMMENT_FIELDS} }} }}
}}
"""

COMMENT_UPDATE = f"""
mutation CommentUpdate($id: String!, $input: CommentUpdateInput!) {{
  commentUpdate(id: $id, input: $input) {{ success comment {{ {COMMENT_FIELDS} }} }}
}}
"""

COMMENT_DELETE = """
mutation CommentDelete($id: String!) { commentDelete(id: $id) { success } }
"""

# --------------------------------------------------------------------------
# Projects and milestones
# --------------------------------------------------------------------------

PROJECT = f"query Project($id: String!) {{ project(id: $id) {{ {PROJECT_FIELDS} }} }}"

PROJECTS = f"""
query Projects($first: Int!, $filter: ProjectFilter) {{
  projects(first: $first, filter: $filter) {{ nodes {{ {PROJECT_FIELDS} }} }}
}}
"""

PROJECT_ISSUES = f"""
query ProjectIssues($id: String!, $first: Int!) {{
  project(id: $id) {{ issues(first: $first) {{ nodes {{ {ISSUE_FIELDS} }} }} }}
}}
"""

PROJECT_CREATE = f"""
mutation ProjectCreate($input: ProjectCreateInput!) {{
  projectCreate(input: $input) {{ success project {{ {PROJECT_FIELDS} }} }}
}}
"""

PROJECT_UPDATE = f"""
mutation ProjectUpdate($id: String!, $input: ProjectUpdateInput!) {{
  projectUpdate(id: $id, input: $input) {{ success project {{ {PROJECT_FIELDS} }} }}
}}
"""

PROJECT_DELETE = """
mutation ProjectDelete($id: String!) { projectDelete(id: $id) { success } }
"""

MILESTONE = f"""
query ProjectMilestone($id: String!) {{ projectMilestone(id: $id) {{ {MILESTONE_FIELDS} }} }}
"""

PROJECT_MILESTONES = f"""
query ProjectMilestones($id: String!, $first: Int!) {{
  project(id: $id) {{ projectMilestones(first: $first) {{ nodes {{ {MILESTONE_FIELDS} }} }} }}
}}
"""

MILESTONE_CREATE = f"""
mutation ProjectMilestoneCreate($input: ProjectMilestoneCreateInput!) {{
  projectMilestoneCreate(input: $input) {{ success projectMilestone {{ {MILESTONE_FIELDS} }} }}
}}
"""

MILESTONE_UPDATE = f"""
mutation ProjectMilestoneUpdate($id: String!, $input: ProjectMilestoneUpdateInput!) {{
  projectMilestoneUpdate(id: $id, input: $input) {{ success projectMilestone {{ {MILESTONE_FIELDS} }} }}
}}
"""

MILESTONE_DELETE = """
mutation ProjectMilestoneDelete($id: String!) { projectMilestoneDelete(id: $id) { success } }
"""

# --------------------------------------------------------------------------
# Relations
# --------------------------------------------------------------------------

RELATION = f"query IssueRelation($id: String!) {{ issueRelation(id: $id) {{ {RELATION_FIELDS} }} }}"

ISSUE_RELATIONS = f"""
query IssueRelations($id: String!, $first: Int!) {{
  issue(id: $id) {{
    relations(first: $first) {{ nodes {{ {RELATION_FIELDS} }} }}
    inverseRelations(first: $first) {{ nodes {{ {RELATION_FIELDS} }} }}
  }}
}}
"""

RELATION_CREATE = f"""
mutation IssueRelationCreate($input: IssueRelationCreateInput!) {{
  issueRelationCreate(input: $input) {{ success issueRelation {{ {RELATION_FIELDS} }} }}
}}
"""

RELATION_DELETE = """
mutation IssueRelationDelete($id: String!) { issueRelationDelete(id: $id) { success } }
"""
