"""CRUD operations for student records using FastCRUD."""

from fastcrud import FastCRUD

from .models import Student

student_crud: FastCRUD = FastCRUD(Student)
